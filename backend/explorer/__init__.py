"""TreeView Explorer - browse, search and download a directory tree over HTTP."""

__version__ = "1.0.0"
