"""Tests for the amf3 command-line front end."""

from __future__ import annotations

import contextlib
import io
import json
import os
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from amf3 import __version__
from amf3._cli import main

MIXED = bytes([0x09, 0x03, 0x03, ord("k"), 0x03, 0x01, 0x04, 0x09])


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    code = 0
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        try:
            main(argv)
        except SystemExit as e:
            code = e.code
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _write(self, name: str, data: bytes) -> str:
        path = os.path.join(self.tmp.name, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def test_version(self):
        code, out, _ = _run(["version"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "amf3 {}".format(__version__))

    def test_no_command(self):
        code, _, _ = _run([])
        self.assertEqual(code, 1)

    def test_pp_file(self):
        path = self._write("mixed.amf3", MIXED)
        code, out, _ = _run(["pp", path])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"k": True, "0": 9})

    def test_pp_hex(self):
        path = self._write("hello.hex", b"06 0b 48 65 6c 6c 6f\n")
        code, out, _ = _run(["pp", "--hex", path])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), "Hello")

    def test_pp_decode_error(self):
        path = self._write("bad.amf3", b"\x12")
        code, _, err = _run(["pp", path])
        self.assertEqual(code, 2)
        self.assertIn("[ERR_INVALID_MARKER]", err)

    def test_pp_bad_hex(self):
        path = self._write("bad.hex", b"0g")
        code, _, err = _run(["pp", "--hex", path])
        self.assertEqual(code, 2)
        self.assertIn("hex parse error", err)


if __name__ == "__main__":
    unittest.main()
