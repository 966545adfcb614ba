from clipdrop.persistence.tracker import DirectoryTracker, TrackedDirectory

__all__ = ["DirectoryTracker", "TrackedDirectory"]
