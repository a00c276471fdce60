from .tags import FormatTag, TextToken, color_index, split_tags, strip_tags, tag_kind, tokenize


def test_tokenize():
    assert tokenize("$BHello$b World") == [
        TextToken.tag("$B"),
        TextToken.text("Hello"),
        TextToken.tag("$b"),
        TextToken.text(" World"),
    ]


def test_tokenize_unknown_dollar():
    # $C9 is out of range and $X is no tag, both stay text
    toks = tokenize("$C9 $X")
    assert all(tok in TextToken.text for tok in toks)
    assert "".join(tok() for tok in toks) == "$C9 $X"


def test_split_tags():
    assert split_tags("$BHi$b") == ("Hi", [(0, "$B"), (2, "$b")])
    assert split_tags("a$$Bb") == ("a$b", [(2, "$B")])
    assert split_tags("$I$U") == ("", [(0, "$I"), (0, "$U")])
    assert split_tags("plain") == ("plain", [])


def test_strip_tags():
    assert strip_tags("$C3red$C0 and $Ugreen$u") == "red and green"


def test_tag_kinds():
    assert tag_kind("$C5") == FormatTag.TEXT_COLOR
    assert color_index("$C5") == 5
    assert tag_kind("$i") == FormatTag.ITALIC_END
