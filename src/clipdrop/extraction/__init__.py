# ABOUTME: Clipboard extraction pipeline: classify, replicate, fetch, and materialize
# ABOUTME: Turns one clipboard snapshot into files inside a single target directory

"""
Extraction Layer: clipboard representations -> files

- classifier: text -> content label
- images: native format + PNG copies of images
- replicator: file drops, recursively, hard-linking large files
- fetcher: URLs in text and <img> sources in HTML
- orchestrator: runs every applicable branch in a fixed order

Import from the submodules directly; this package keeps no imports so that
low-level helpers can depend on the models without import cycles.
"""
