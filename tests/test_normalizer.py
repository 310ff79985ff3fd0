from intakebrain.extraction.normalizer import capitalize_words, normalize_requirements, strip_markup
from intakebrain.models import Requirements


def test_title_cases_short_fields():
    result = normalize_requirements(
        {
            "role": "senior BACKEND engineer",
            "location": "san francisco",
            "skills": ["node.js", "**rest api**"],
            "companies": ["stripe"],
        }
    )
    assert result.role == "Senior Backend Engineer"
    assert result.location == "San Francisco"
    assert result.skills == ["Node.js", "Rest Api"]
    assert result.companies == ["Stripe"]


def test_qualities_are_cleaned_but_keep_casing():
    result = normalize_requirements(
        {"qualities": ["- **Owns** outcomes end-to-end.", "• Works well with PMs.", "  ", "*"]}
    )
    assert result.qualities == ["Owns outcomes end-to-end.", "Works well with PMs."]


def test_hyphenated_words_survive():
    assert capitalize_words("e-commerce") == "E-commerce"
    assert strip_markup("- full-stack") == "full-stack"


def test_empty_values_become_null():
    result = normalize_requirements({"role": "", "skills": [], "industry": ["**"]})
    assert result == Requirements()


def test_accepts_requirements_instance_and_none():
    assert normalize_requirements(Requirements(role="designer")).role == "Designer"
    assert normalize_requirements(None) == Requirements()
