"""
Unit tests for file format classification
"""
import pytest

from metering.core.formats import OperationCategory, classify_file, file_extension


@pytest.mark.parametrize("filename", ["photo.jpg", "photo.JPEG", "scan.png", "a.b.webp", "anim.gif", "x.avif", "doc.TIF"])
def test_regular_formats(filename):
    """Test common web formats are regular operations"""
    assert classify_file(filename) == OperationCategory.REGULAR


@pytest.mark.parametrize("filename", ["IMG_0001.CR2", "shot.nef", "shot.arw", "shot.dng", "shot.orf", "shot.raf", "shot.rw2"])
def test_raw_formats(filename):
    """Test camera RAW formats are raw operations"""
    assert classify_file(filename) == OperationCategory.RAW


@pytest.mark.parametrize("filename", ["report.pdf", "archive.zip", "README", "", "trailingdot.", "image.jpg.exe"])
def test_unknown_formats(filename):
    """Test anything else is unknown"""
    assert classify_file(filename) == OperationCategory.UNKNOWN


def test_file_extension():
    """Test extension extraction"""
    assert file_extension("Holiday.Photo.JPG") == "jpg"
    assert file_extension("noextension") == ""
    assert file_extension("") == ""
