from docforensics.validation.page_elements import (
    classify_repeated_lines,
    filter_repeated_lines,
    normalize_line,
    remove_page_elements,
    transform_toc_dots,
)

BODIES = [
    "The parties agree to the following terms.",
    "Payment is due within thirty days.",
    "Either party may terminate with notice.",
    "Disputes are settled by arbitration.",
    "This agreement is governed by local law.",
]


def _five_page_contract() -> str:
    pages = []
    for number, body in enumerate(BODIES, start=1):
        page = f"CONFIDENTIAL — Page {number}\n\n{body}"
        if number == 1:
            page = f"CONFIDENTIAL — Page {number}\n\n# Contract Terms\n\n{body}"
        pages.append(page)
    return "\n\n".join(pages)


class TestClassifyRepeatedLines:
    def test_digit_variants_share_a_pattern(self) -> None:
        lines = [f"CONFIDENTIAL — Page {n}" for n in range(1, 6)]
        assert classify_repeated_lines(lines) == {"CONFIDENTIAL — Page #"}

    def test_below_threshold_is_not_repeated(self) -> None:
        assert classify_repeated_lines(["Footer 1", "Footer 2"]) == set()

    def test_headings_and_blank_lines_never_count(self) -> None:
        lines = ["# Title", "# Title", "# Title", "", "", ""]
        assert classify_repeated_lines(lines) == set()

    def test_normalize_line(self) -> None:
        assert normalize_line("  Page   12  of 40 ") == "Page # of #"


class TestRemovePageElements:
    def test_repeated_header_removed_unique_heading_kept(self) -> None:
        cleaned, removed = remove_page_elements(_five_page_contract())
        assert "CONFIDENTIAL" not in cleaned
        assert cleaned.count("# Contract Terms") == 1
        for body in BODIES:
            assert body in cleaned
        assert removed == {"repeated_pattern": 5}

    def test_page_furniture_categories(self) -> None:
        md = "\n".join(
            [
                "Intro text",
                "Page 3",
                "Folio 12",
                "4 of 20",
                "xiv",
                "--- 5 ---",
                "17",
                "Body text",
            ]
        )
        cleaned, removed = remove_page_elements(md)
        assert cleaned == "Intro text\nBody text"
        assert removed == {
            "page_label": 1,
            "folio": 1,
            "page_of_total": 1,
            "roman_numeral": 1,
            "page_separator": 1,
            "page_number": 1,
        }

    def test_years_are_kept(self) -> None:
        cleaned, removed = remove_page_elements("Signed in\n2024\nby both parties")
        assert "2024" in cleaned
        assert removed == {}

    def test_consecutive_duplicate_heading_removed(self) -> None:
        cleaned, removed = remove_page_elements("# Terms\nfirst part\n# Terms\nsecond part")
        assert cleaned == "# Terms\nfirst part\nsecond part"
        assert removed == {"duplicate_heading": 1}

    def test_repeated_watermark_categorized(self) -> None:
        md = "\n".join(["DRAFT", "alpha", "DRAFT", "beta", "DRAFT", "gamma"])
        cleaned, removed = remove_page_elements(md)
        assert cleaned == "alpha\nbeta\ngamma"
        assert removed == {"watermark": 3}


class TestTocDots:
    def test_dot_leaders_become_colon(self) -> None:
        assert transform_toc_dots("Introduction..........3") == "Introduction: 3"

    def test_spaced_dot_leaders(self) -> None:
        assert transform_toc_dots("Scope . . . . . . 7") == "Scope : 7"


class TestFilterRepeatedLines:
    def test_keeps_headings_and_drops_page_numbers(self) -> None:
        lines = ["# Title", "12", "text", "Page 4", ""]
        assert filter_repeated_lines(lines) == ["# Title", "text", ""]
