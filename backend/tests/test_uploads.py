import io

import pytest
from fastapi import UploadFile

from services.uploads import UploadTooLargeError, spooled_upload


def _upload(content: bytes, filename="policy.pdf") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest.mark.asyncio
async def test_temp_file_removed_after_success():
    async with spooled_upload(_upload(b"%PDF-1.4 data")) as path:
        assert path.suffix == ".pdf"
        assert path.read_bytes() == b"%PDF-1.4 data"
    assert not path.exists()


@pytest.mark.asyncio
async def test_temp_file_removed_after_error():
    with pytest.raises(RuntimeError):
        async with spooled_upload(_upload(b"abc", "scan.png")) as path:
            assert path.exists()
            raise RuntimeError("handler failed")
    assert not path.exists()


@pytest.mark.asyncio
async def test_too_large():
    with pytest.raises(UploadTooLargeError):
        async with spooled_upload(_upload(b"x" * 11), max_bytes=10):
            pass
