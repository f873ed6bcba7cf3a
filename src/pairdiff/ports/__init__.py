from .comparator import ComparatorPort
from .filesystem import FilesystemPort

__all__ = ["ComparatorPort", "FilesystemPort"]
