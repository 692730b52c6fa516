"""Tests for display labels, export file names and descriptions."""

import pytest

from wojak_creator import labels
from wojak_creator.labels import describe_selection, export_filename, format_display_label, title_case
from wojak_creator.selection import Selection

PORTRAIT = Selection(
    {
        "Head": "HEAD/Cap-Red.png",
        "Eyes": "EYE/Normal.png",
        "Base": "BASE/Classic.png",
        "MouthBase": "MOUTH/BASE/Numb.png",
        "Clothes": "CLOTHES/Suit-Black-Red-Tie.png",
        "Background": "BACKGROUND/Blue.png",
    }
)


@pytest.mark.parametrize(
    "raw, label",
    [
        ("$cashtag", "$CASHTAG"),
        ("Chia Farmer blue", "Chia Farmer (Blue)"),
        ("chia-farmer-RED", "Chia Farmer (Red)"),
        ("mom's basement", "Mom Basement"),
        ("nyse dump", "NYSE Dump"),
        ("NYSE  pump", "NYSE Pump"),
        ("screeming", "Screaming"),
        ("stach", "Stache"),
        ("pepe mask", "Pepe Mask"),
        ("Cap (Red)", "Cap (red)"),
        ("", ""),
    ],
)
def test_format_display_label(raw, label):
    assert format_display_label(raw) == label


def test_title_case():
    assert title_case("neon GREEN") == "Neon Green"
    assert title_case("") == ""


class TestExportFilename:
    """Tests for export_filename."""

    def test_tokens_in_picker_order(self, manifest):
        assert export_filename(manifest, PORTRAIT) == "Wojak_Cap-Red_Normal_Classic_Numb_Suit-Black-Tie-Red_Blue.png"

    def test_empty_selection(self, manifest, empty):
        assert export_filename(manifest, empty) == "Wojak.png"

    def test_addon_token_replaces_garment(self, manifest):
        selection = Selection(
            {
                "Base": "BASE/Alien.png",
                "Clothes": "CLOTHES/Tee-Blue.png",
                "ClothesAddon": "CLOTHES/ADDON/Chia-Farmer-Red.png",
            }
        )

        assert export_filename(manifest, selection) == "Wojak_Alien_ChiaFarmer-Red.png"

    def test_color_variant_tokens(self, manifest):
        selection = Selection({"Head": "HEAD/Beanie-Neon-Green.png", "Eyes": "EYE/Shades-Gold.png"})

        assert export_filename(manifest, selection) == "Wojak_Beanie-Neon-Green_Shades-Gold.png"

    def test_least_identifying_tokens_dropped_first(self, manifest, monkeypatch):
        monkeypatch.setattr(labels, "FILENAME_MAX_LENGTH", 30)

        assert export_filename(manifest, PORTRAIT) == "Wojak_Cap-Red_Normal_Classic.png"

    def test_all_tokens_dropped(self, manifest, monkeypatch):
        monkeypatch.setattr(labels, "FILENAME_MAX_LENGTH", 10)

        assert export_filename(manifest, PORTRAIT) == "Wojak.png"

    def test_truncated_with_suffix(self, manifest, monkeypatch):
        monkeypatch.setattr(labels, "FILENAME_PREFIX", "Wojak-Portrait-Export")
        monkeypatch.setattr(labels, "FILENAME_MAX_LENGTH", 12)

        assert export_filename(manifest, PORTRAIT) == "Wojak-Po_etc.png"

    def test_deterministic(self, manifest):
        assert export_filename(manifest, PORTRAIT) == export_filename(manifest, PORTRAIT.to_dict())


class TestDescribeSelection:
    """Tests for describe_selection."""

    def test_full_portrait(self, manifest):
        text = describe_selection(manifest, PORTRAIT)

        assert text == (
            "A classic wojak character with cap in red on their head, with normal eyes, "
            "with numb mouth, wearing a black suit with tie in red, with blue background."
        )

    def test_empty(self, manifest, empty):
        assert describe_selection(manifest, empty) == "A wojak character."

    def test_addon_outfit(self, manifest):
        selection = Selection(
            {"Clothes": "CLOTHES/Tee-White.png", "ClothesAddon": "CLOTHES/ADDON/Chia-Farmer-Brown.png"}
        )

        assert describe_selection(manifest, selection) == "A wojak character wearing a brown Chia Farmer outfit."

    def test_plain_garment_and_mask(self, manifest):
        selection = Selection({"Clothes": "CLOTHES/Hoodie.png", "Mask": "MASK/Ski-Mask.png"})

        assert describe_selection(manifest, selection) == "A wojak character wearing ski mask, wearing hoodie."
