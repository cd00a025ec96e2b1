import pytest

from ach_toggle.rules import ACH_RECORD_LENGTH


def make_record(kind: str) -> str:
    return f"{kind} ACH TEST RECORD".ljust(ACH_RECORD_LENGTH, "0")


@pytest.fixture
def records():
    # file header, batch header, entry detail, batch control, file control
    return [make_record(k) for k in ("1", "5", "6", "8", "9")]


@pytest.fixture
def write_file(tmp_path):
    def _write(content, name="batch.ach", encoding="ascii"):
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode(encoding))
        return path

    return _write
