"""
Tests for locating stored files in Cloudinary.
"""

from app.core.storage import CloudinaryFileStorage


class TestPublicIdFromUrl:

    def test_image_drops_extension(self) -> None:
        url = "https://res.cloudinary.com/demo/image/upload/v1712345678/naus/photos/p.png"
        assert CloudinaryFileStorage.public_id_from_url(url) == "naus/photos/p"

    def test_raw_keeps_extension(self) -> None:
        url = "https://res.cloudinary.com/demo/raw/upload/v1712345678/naus/certificates/cert.docx"
        assert CloudinaryFileStorage.public_id_from_url(url) == "naus/certificates/cert.docx"

    def test_not_a_cloudinary_url(self) -> None:
        assert CloudinaryFileStorage.public_id_from_url("photos/local.png") is None
        assert CloudinaryFileStorage.public_id_from_url(None) is None
