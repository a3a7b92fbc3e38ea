from pathlib import Path
import sys
import unittest

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

from ansi_tokenizer import ControlSequence, Other, Text, tokenize


class TokenizeTests(unittest.TestCase):
    def test_plain_text(self):
        self.assertEqual(tokenize("hello"), [Text("hello")])
        self.assertEqual(tokenize(""), [])

    def test_sgr_between_text(self):
        self.assertEqual(
            tokenize("a\x1b[1;31mb"),
            [Text("a"), ControlSequence("m", (1, 31), raw="\x1b[1;31m"), Text("b")],
        )

    def test_empty_and_colon_params(self):
        self.assertEqual(tokenize("\x1b[m")[0].params, ())
        self.assertEqual(tokenize("\x1b[;4m")[0].params, (None, 4))
        self.assertEqual(tokenize("\x1b[38:2::10:20:30m")[0].params, (38, 2, None, 10, 20, 30))

    def test_private_marker(self):
        token = tokenize("\x1b[?25l")[0]
        self.assertEqual(token.command, "l")
        self.assertEqual(token.private, "?")
        self.assertEqual(token.params, (25,))

    def test_non_sgr_csi(self):
        token = tokenize("\x1b[2J")[0]
        self.assertIsInstance(token, ControlSequence)
        self.assertEqual(token.command, "J")

    def test_osc_with_bel_and_st(self):
        self.assertEqual(tokenize("\x1b]0;title\x07x"), [Other("osc", "\x1b]0;title\x07"), Text("x")])
        self.assertEqual(tokenize("\x1b]8;;url\x1b\\x")[0], Other("osc", "\x1b]8;;url\x1b\\"))

    def test_charset_and_short_escapes(self):
        self.assertEqual(tokenize("\x1b(Bx"), [Other("charset", "\x1b(B"), Text("x")])
        self.assertEqual(tokenize("\x1b7x"), [Other("esc", "\x1b7"), Text("x")])

    def test_unterminated_osc_keeps_following_text(self):
        self.assertEqual(
            tokenize("before\x1b]0;title\nvisible"),
            [Text("before"), Other("esc", "\x1b]"), Text("0;title\nvisible")],
        )

    def test_unterminated_dcs_keeps_following_text(self):
        self.assertEqual(
            tokenize("a\x1bPq\nvisible"),
            [Text("a"), Other("esc", "\x1bP"), Text("q\nvisible")],
        )

    def test_trailing_lone_escape(self):
        self.assertEqual(tokenize("x\x1b"), [Text("x"), Other("esc", "\x1b")])


if __name__ == "__main__":
    unittest.main()
