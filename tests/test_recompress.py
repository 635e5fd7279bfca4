import io
import pathlib
import random
import sys
import unittest

from PIL import Image

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "scripts"))

from image_gateway.core.errors import InvalidInputError
from image_gateway.core.recompress import recompress, validate_quality


def _noise_image(width: int, height: int, seed: int = 7) -> Image.Image:
    rng = random.Random(seed)
    data = bytes(rng.getrandbits(8) for _ in range(width * height * 3))
    return Image.frombytes("RGB", (width, height), data)


def _encode(image: Image.Image, fmt: str, **kwargs) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


class TestRecompressDimensions(unittest.TestCase):
    def test_jpeg_dimensions_unchanged_across_quality_range(self) -> None:
        source = _encode(_noise_image(64, 48), "JPEG", quality=90)
        for quality in (1, 25, 50, 75, 100):
            with self.subTest(quality=quality):
                output = recompress(source, "image/jpeg", quality)
                decoded = Image.open(io.BytesIO(output.image_bytes))
                self.assertEqual(decoded.format, "JPEG")
                self.assertEqual(decoded.size, (64, 48))
                self.assertEqual((output.width, output.height), (64, 48))
                self.assertEqual(output.byte_size, len(output.image_bytes))

    def test_png_stays_png(self) -> None:
        source = _encode(Image.new("RGBA", (20, 10), (255, 0, 0, 128)), "PNG")
        output = recompress(source, "image/png", 40)
        decoded = Image.open(io.BytesIO(output.image_bytes))
        self.assertEqual(output.mime_type, "image/png")
        self.assertEqual(decoded.format, "PNG")
        self.assertEqual(decoded.size, (20, 10))
        self.assertEqual(decoded.mode, "RGBA")

    def test_transparent_non_png_becomes_jpeg(self) -> None:
        source = _encode(Image.new("RGBA", (16, 16), (0, 255, 0, 0)), "WEBP", lossless=True)
        output = recompress(source, "image/webp", 80)
        decoded = Image.open(io.BytesIO(output.image_bytes))
        self.assertEqual(output.mime_type, "image/jpeg")
        self.assertEqual(decoded.format, "JPEG")
        self.assertEqual(decoded.size, (16, 16))

    def test_palette_gif_becomes_jpeg(self) -> None:
        source = _encode(Image.new("P", (12, 8), 3), "GIF")
        output = recompress(source, "image/gif", 70)
        self.assertEqual(Image.open(io.BytesIO(output.image_bytes)).size, (12, 8))


class TestRecompressSize(unittest.TestCase):
    def test_lower_quality_shrinks_large_jpeg(self) -> None:
        source = _encode(_noise_image(320, 320), "JPEG", quality=95)
        self.assertGreater(len(source), 50 * 1024)
        output = recompress(source, "image/jpeg", 60)
        self.assertLess(output.byte_size, len(source))
        decoded = Image.open(io.BytesIO(output.image_bytes))
        self.assertEqual(decoded.format, "JPEG")
        self.assertEqual(decoded.size, (320, 320))


class TestRecompressErrors(unittest.TestCase):
    def test_corrupt_bytes_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            recompress(b"definitely not an image", "image/jpeg", 80)

    def test_empty_bytes_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            recompress(b"", "image/png", 80)

    def test_quality_out_of_range(self) -> None:
        source = _encode(Image.new("RGB", (4, 4)), "PNG")
        for quality in (0, 101, -5):
            with self.subTest(quality=quality):
                with self.assertRaises(InvalidInputError):
                    recompress(source, "image/png", quality)

    def test_quality_type_checked(self) -> None:
        for value in (True, 80.0, "80", None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidInputError):
                    validate_quality(value)
        self.assertEqual(validate_quality(1), 1)
        self.assertEqual(validate_quality(100), 100)


if __name__ == "__main__":
    unittest.main()
