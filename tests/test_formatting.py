# tests/test_formatting.py
from cloudvault_app.services.formatting import human_size, timestamp_text


def test_human_size():
    assert human_size(0.5) == "512 KB"
    assert human_size(0.001) == "1.0 KB"
    assert human_size(4) == "4 MB"
    assert human_size(4.25) == "4.2 MB"
    assert human_size(1024) == "1.0 GB"
    assert human_size(1536) == "1.5 GB"
    assert human_size(1100) == "1.07 GB"
    assert human_size(None) == "0 KB"


def test_timestamp_text_never():
    assert timestamp_text(0) is None
    assert timestamp_text(1_700_000_000, "%Y").isdigit()
