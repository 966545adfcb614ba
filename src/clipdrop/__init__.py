# ABOUTME: clipdrop turns whatever is on the clipboard into files in a fresh working directory
# ABOUTME: Package root; see clipdrop.extraction for the pipeline and clipdrop.main for the CLI

__version__ = "0.1.0"
