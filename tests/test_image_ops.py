import contextlib
import importlib.util
import io
import os
import pathlib
import sys
import tempfile
import unittest
from unittest import mock

from PIL import Image

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "scripts"))
SPEC = importlib.util.spec_from_file_location("image_ops", ROOT / "scripts" / "image_ops.py")
if SPEC is None or SPEC.loader is None:
    raise RuntimeError("Unable to load image_ops module for tests")
image_ops = importlib.util.module_from_spec(SPEC)
sys.modules["image_ops"] = image_ops
SPEC.loader.exec_module(image_ops)


def _run(argv, env=None):
    stdout = io.StringIO()
    stderr = io.StringIO()
    with mock.patch.dict(os.environ, env or {}, clear=True):
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = image_ops.main(argv)
    return code, stdout.getvalue(), stderr.getvalue()


class TestCompressCommand(unittest.TestCase):
    def test_writes_compressed_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            source = pathlib.Path(tmpdir) / "photo.jpg"
            Image.new("RGB", (48, 32), (10, 200, 30)).save(source, format="JPEG", quality=95)
            out_dir = pathlib.Path(tmpdir) / "out"

            code, stdout, _ = _run(["compress", str(source), "--quality", "60", "--out", str(out_dir)])

            self.assertEqual(code, 0)
            written = out_dir / "compressed_photo.jpg"
            self.assertTrue(written.exists())
            self.assertIn(str(written), stdout)
            with Image.open(written) as decoded:
                self.assertEqual(decoded.format, "JPEG")
                self.assertEqual(decoded.size, (48, 32))

    def test_png_keeps_png_extension(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            source = pathlib.Path(tmpdir) / "icon.png"
            Image.new("RGBA", (8, 8), (0, 0, 0, 0)).save(source, format="PNG")
            out_dir = pathlib.Path(tmpdir) / "out"
            code, _, _ = _run(["compress", str(source), "--out", str(out_dir)])
            self.assertEqual(code, 0)
            self.assertTrue((out_dir / "compressed_icon.png").exists())


class TestFailedResults(unittest.TestCase):
    def test_missing_key_exits_nonzero(self) -> None:
        code, stdout, stderr = _run(["generate", "a cat", "--size", "2K"])
        self.assertEqual(code, 1)
        self.assertIn("missing_credential", stderr)
        self.assertEqual(stdout, "")

    def test_unreadable_input_path(self) -> None:
        code, _, stderr = _run(["remove-bg", "/nonexistent/image.png"])
        self.assertEqual(code, 1)
        self.assertIn("Could not read", stderr)


class TestCredentialsCommand(unittest.TestCase):
    def test_never_prints_full_secret(self) -> None:
        code, stdout, _ = _run(["credentials"], env={"ARK_API_KEY": "ark-supersecret-value-9"})
        self.assertEqual(code, 0)
        self.assertNotIn("supersecret", stdout)
        self.assertIn("ark-images: set via ARK_API_KEY (ark-...)", stdout)
        self.assertIn("remove-bg: missing", stdout)


class TestBuildRequest(unittest.TestCase):
    def test_describe_format_from_suffix(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            source = pathlib.Path(tmpdir) / "scan.png"
            source.write_bytes(b"\x89PNG fake")
            args = image_ops.build_parser().parse_args(["describe", str(source)])
            request = image_ops._build_request(args)
            self.assertEqual(request.operation, "describe")
            self.assertEqual(request.payload.image_format, "png")
            self.assertEqual(request.payload.image_bytes, b"\x89PNG fake")


if __name__ == "__main__":
    unittest.main()
