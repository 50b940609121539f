"""
File format classification
"""
import enum


class OperationCategory(str, enum.Enum):
    """Operation category derived from a file extension"""
    REGULAR = "regular"
    RAW = "raw"
    UNKNOWN = "unknown"

    def __str__(self):
        return self.value


REGULAR_EXTENSIONS = frozenset({
    "jpg", "jpeg", "png", "webp", "gif", "bmp", "svg", "avif", "tiff", "tif",
})

RAW_EXTENSIONS = frozenset({
    "cr2", "cr3", "arw", "nef", "nrw", "dng", "orf", "raf", "rw2", "pef", "srw",
})


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot, or '' when there is none"""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].strip().lower()


def classify_file(filename: str) -> OperationCategory:
    """
    Classify a filename into an operation category

    Pure function of the filename: the same name always yields the same category.
    """
    extension = file_extension(filename)
    if extension in REGULAR_EXTENSIONS:
        return OperationCategory.REGULAR
    if extension in RAW_EXTENSIONS:
        return OperationCategory.RAW
    return OperationCategory.UNKNOWN
