import json
from unittest.mock import MagicMock, patch

from albumsync.exif import copy_exif_tags, read_exif_tags


@patch("albumsync.exif.shutil.which", return_value="/usr/bin/exiftool")
@patch("albumsync.exif.subprocess.run")
def test_reads_first_record(mock_run, mock_which):
    mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps([{"Orientation": 1}]))
    assert read_exif_tags("/x.jpg") == {"Orientation": 1}
    mock_run.assert_called_once_with(["exiftool", "-j", "-n", "/x.jpg"], capture_output=True, text=True)


@patch("albumsync.exif.shutil.which", return_value="/usr/bin/exiftool")
@patch("albumsync.exif.subprocess.run")
def test_failure_returns_empty(mock_run, mock_which):
    mock_run.return_value = MagicMock(returncode=1, stderr="File not found")
    assert read_exif_tags("/x.jpg") == {}


@patch("albumsync.exif.shutil.which", return_value=None)
def test_missing_exiftool_returns_empty(mock_which):
    assert read_exif_tags("/x.jpg") == {}


@patch("albumsync.exif.shutil.which", return_value="/usr/bin/exiftool")
@patch("albumsync.exif.subprocess.run")
def test_copy_tags_from_source(mock_run, mock_which):
    mock_run.return_value = MagicMock(returncode=0)
    assert copy_exif_tags("/in/a.heic", "/out/a.jpg") is True
    mock_run.assert_called_once_with(
        ["exiftool", "-overwrite_original", "-TagsFromFile", "/in/a.heic", "/out/a.jpg"],
        capture_output=True, text=True,
    )


@patch("albumsync.exif.shutil.which", return_value="/usr/bin/exiftool")
@patch("albumsync.exif.subprocess.run")
def test_copy_tags_failure(mock_run, mock_which):
    mock_run.return_value = MagicMock(returncode=1, stderr="Error: File not found")
    assert copy_exif_tags("/in/a.heic", "/out/a.jpg") is False
