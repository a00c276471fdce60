import pytest

from .model import ScreenKind
from .textcodec import PARAGRAPH_END, PARAGRAPH_START, TextCodec


def p(body: str) -> str:
    return PARAGRAPH_START + body + PARAGRAPH_END


def test_simple_tags():
    codec = TextCodec()
    assert codec.to_markup("$BHello$b World", ScreenKind.INFORMATION) == p("<b>Hello</b> World")
    assert codec.to_markup("$Iit$i $Uun$u", ScreenKind.PICT) == p("<i>it</i> <u>un</u>")


def test_colors_are_closed():
    codec = TextCodec()
    assert codec.to_markup("$C1 red $C2 blue", ScreenKind.INFORMATION) == p(
        '<span style="color:#ffffff"> red </span><span style="color:#ff0000"> blue</span>'
    )
    assert codec.to_markup("no color", ScreenKind.INFORMATION) == p("no color")


def test_escaping_and_tabs():
    codec = TextCodec()
    assert codec.to_markup('a < b & "c"', ScreenKind.INFORMATION) == p("a &lt; b &amp; &quot;c&quot;")
    assert codec.to_markup("a\tb", ScreenKind.INFORMATION) == p("a b")


def test_empty():
    assert TextCodec().to_markup("", ScreenKind.INFORMATION) == ""


def test_wrapping_applies():
    codec = TextCodec()
    assert codec.to_markup("a" * 71, ScreenKind.INFORMATION) == p("a" * 70 + "\na")
    # escaped characters count once
    assert codec.to_markup("&" * 70, ScreenKind.INFORMATION).count("\n") == 0


def test_custom_colors():
    codec = TextCodec(colors=[f"#00000{i}" for i in range(8)])
    assert codec.to_markup("$C7x", ScreenKind.LOGON) == p('<span style="color:#000007">x</span>')


def test_color_table_size():
    with pytest.raises(ValueError):
        TextCodec(colors=["#000000"])


def test_from_markup():
    codec = TextCodec()
    text = '$BHello$b $C2red$C0 <&>'
    assert codec.from_markup(codec.to_markup(text, ScreenKind.LOGON)) == text
    assert codec.from_markup('<span style="color:#123456">x</span>') == "$C0x"
