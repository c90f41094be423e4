"""Underwriting criteria questions and tier assignment."""
from __future__ import annotations

from typing import Dict, List, Optional

from core.config import enum_value

_RESIDENTIAL = {
    "propertyQuestions": [
        {
            "key": "hmo",
            "label": "HMO",
            "options": [
                ("No (Tier 1)", 1),
                ("Up to 6 beds (Tier 2)", 2),
                ("More than 6 beds (Tier 3)", 3),
            ],
        },
        {
            "key": "mufb",
            "label": "MUFB",
            "options": [
                ("No (Tier 1)", 1),
                ("Up to 6 units (Tier 2)", 2),
                ("Less than 30 units (Tier 3)", 3),
            ],
        },
        {"key": "holiday", "label": "Holiday Let?", "options": [("No", 1), ("Yes", 3)]},
        {"key": "flatAboveComm", "label": "Flat above commercial?", "options": [("No", 1), ("Yes", 2)]},
    ],
    "applicantQuestions": [
        {
            "key": "expat",
            "label": "Expat",
            "options": [
                ("No (Tier 1)", 1),
                ("Yes - UK footprint (Tier 2)", 2),
                ("Yes - Without UK footprint (Tier 3)", 3),
            ],
        },
        {
            "key": "fnational",
            "label": "Foreign National",
            "options": [
                ("No (Tier 1)", 1),
                ("Yes - with ILR (Tier 2)", 2),
                ("Yes - Without ILR (Tier 3)", 3),
            ],
        },
        {"key": "ftl", "label": "First Time Landlord?", "options": [("No", 1), ("Yes", 2)]},
        {"key": "offshore", "label": "Offshore company?", "options": [("No", 1), ("Yes", 3)]},
        {
            "key": "mortgageArrears",
            "label": "Mortgage Arrears (in last 24 months)",
            "options": [("No", 1), ("0 in 24", 1), ("0 in 18", 2), ("Any (by referral)", 3)],
        },
        {
            "key": "unsecuredArrears",
            "label": "Unsecured Arrears (in last 24 months)",
            "options": [("No", 1), ("0 in 24", 1), ("0 in 12", 2), ("Any (by referral)", 3)],
        },
        {
            "key": "ccjDefault",
            "label": "CCJ & Default (last 24 months)",
            "helper": "Ignore <£350, telecom, utility",
            "options": [("No", 1), ("0 in 24", 1), ("0 in 18", 2), ("Any (by referral)", 3)],
        },
        {
            "key": "bankruptcy",
            "label": "Bankruptcy",
            "options": [("Never", 1), ("Discharged (by referral)", 3)],
        },
    ],
}

_COMMERCIAL = {
    "propertyQuestions": [
        {
            "key": "hmo",
            "label": "HMO",
            "options": [
                ("No (Tier 1)", 1),
                ("Up to 12 beds (Tier 1)", 1),
                ("More than 12 beds (Tier 2)", 2),
            ],
        },
        {
            "key": "mufb",
            "label": "MUFB",
            "options": [
                ("No (Tier 1)", 1),
                ("Up to 12 units (Tier 1)", 1),
                ("More than 12 units (Tier 2)", 2),
            ],
        },
        {"key": "ownerocc", "label": "Owner Occupier?", "options": [("No", 1), ("Yes", 2)]},
        {"key": "devexit", "label": "Developer Exit?", "options": [("No", 1), ("Yes", 2)]},
    ],
    "applicantQuestions": [
        {"key": "expat", "label": "Expat", "options": [("No (Tier 1)", 1), ("Yes (Tier 2)", 2)]},
        {"key": "fnational", "label": "Foreign National", "options": [("No (Tier 1)", 1), ("Yes (Tier 2)", 2)]},
        {"key": "ftl", "label": "First Time Landlord?", "options": [("No", 1), ("Yes", 2)]},
        {"key": "offshore", "label": "Offshore Company?", "options": [("No", 1), ("Yes", 2)]},
        {
            "key": "mortgageArrears",
            "label": "Mortgage Arrears",
            "options": [("No", 1), ("2 in 18, 0 in 6", 1), ("All considered by referral", 2)],
        },
        {
            "key": "unsecuredArrears",
            "label": "Unsecured Arrears",
            "options": [("No", 1), ("2 in last 18", 1), ("All considered by referral", 2)],
        },
        {
            "key": "ccjDefault",
            "label": "CCJ & Default",
            "helper": "Ignore <£350, telecom, utility",
            "options": [("No", 1), ("2 in 18, 0 in 6", 1), ("All considered by referral", 2)],
        },
        {
            "key": "bankruptcy",
            "label": "Bankruptcy",
            "options": [("Never", 1), ("Discharged > 3 years", 1), ("All considered by referral", 2)],
        },
    ],
}

CRITERIA_CONFIG = {"Residential": _RESIDENTIAL, "Commercial": _COMMERCIAL}

# Answers a Core Residential case may give; questions missing here are not
# restricted.
CORE_ALLOWED_ANSWERS = {
    "hmo": ["No (Tier 1)", "Up to 6 beds (Tier 2)"],
    "mufb": ["No (Tier 1)", "Up to 6 units (Tier 2)"],
    "holiday": ["No"],
    "flatAboveComm": ["No"],
    "expat": ["No (Tier 1)", "Yes - UK footprint (Tier 2)"],
    "fnational": ["No (Tier 1)"],
    "ftl": ["No", "Yes"],
    "offshore": ["No"],
    "mortgageArrears": ["No", "0 in 24", "0 in 18"],
    "unsecuredArrears": ["No", "0 in 24", "0 in 12"],
    "ccjDefault": ["No", "0 in 24", "0 in 18"],
    "bankruptcy": ["Never"],
}


def criteria_for(property_type) -> Dict:
    """Question set for a property type; Semi-Commercial shares Commercial's."""
    key = "Residential" if enum_value(property_type) == "Residential" else "Commercial"
    return CRITERIA_CONFIG[key]


def questions_for(property_type) -> List[Dict]:
    cfg = criteria_for(property_type)
    return cfg["propertyQuestions"] + cfg["applicantQuestions"]


def default_answers(property_type) -> Dict[str, str]:
    return {q["key"]: q["options"][0][0] for q in questions_for(property_type)}


def validate_answers(property_type, answers: Dict[str, str]) -> None:
    """Raise ``ValueError`` for an unknown question key or option label."""
    questions = {q["key"]: q for q in questions_for(property_type)}
    for key, label in (answers or {}).items():
        q = questions.get(key)
        if q is None:
            raise ValueError(f"Unknown criteria question {key!r}")
        if label not in [opt for opt, _ in q["options"]]:
            raise ValueError(f"Invalid answer {label!r} for {q['label']}")


def compute_tier(property_type, answers: Optional[Dict[str, str]] = None) -> str:
    """Highest tier among the selected answers, never below Tier 1."""
    answers = answers or {}
    tier = 1
    for q in questions_for(property_type):
        label = answers.get(q["key"])
        for opt, opt_tier in q["options"]:
            if opt == label:
                tier = max(tier, opt_tier)
    return f"Tier {tier}"


def is_within_core_criteria(property_type, answers: Optional[Dict[str, str]] = None) -> bool:
    """Whether the answers qualify for the Core Residential range."""
    if enum_value(property_type) != "Residential":
        return False
    answers = answers or {}
    for key, allowed in CORE_ALLOWED_ANSWERS.items():
        label = answers.get(key)
        if label is not None and label not in allowed:
            return False
    return True


def effective_product_group(product_group, property_type, answers=None) -> str:
    """Fall back to Specialist when Core is selected but not available."""
    group = enum_value(product_group)
    if group == "Core" and not is_within_core_criteria(property_type, answers):
        return "Specialist"
    return group
