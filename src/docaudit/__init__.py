"""DocAudit - inventory and duplicate detection for office document shares."""

__version__ = "0.1.0"
