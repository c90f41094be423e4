DISCLAIMER = (
    "Illustrative quotation only. Figures are indicative and subject to full "
    "underwriting, valuation and credit approval. Rates and criteria may change "
    "without notice and the final offer prevails."
)

CORE_FLOOR_RATE = 0.055

DEFERRED_STEP = 0.0001

PRODUCT_TYPES_LIST = {
    "Residential": ["2yr Fix", "3yr Fix", "2yr Tracker"],
    "Commercial": ["2yr Fix", "3yr Fix", "2yr Tracker"],
    "Semi-Commercial": ["2yr Fix", "3yr Fix", "2yr Tracker"],
}

FEE_COLUMNS = {
    "Residential": [6, 4, 3, 2],
    "Commercial": [6, 4, 2],
    "Semi-Commercial": [6, 4, 2],
    "RetentionResidential": [5.5, 3.5, 2.5, 1.5],
    "RetentionCommercial": [5.5, 3.5, 1.5],
    "Core": [6, 4, 3, 2],
    "Core_Retention_65": [5.5, 3.5, 2.5, 1.5],
    "Core_Retention_75": [5.5, 3.5, 2.5, 1.5],
}

_TERM_MONTHS = {"2yr Fix": 24, "3yr Fix": 36, "2yr Tracker": 24}

LOAN_LIMITS = {
    "Residential": {
        "max_rolled_months": 9,
        "max_deferred_fix": 0.0125,
        "max_deferred_tracker": 0.02,
        "min_icr_fix": 1.25,
        "min_icr_trk": 1.30,
        "total_term": 10,
        "min_loan": 150000,
        "max_loan": 3000000,
        "standard_bbr": 0.04,
        "stress_bbr": 0.0425,
        "current_mvr": 0.0859,
        "term_months": _TERM_MONTHS,
    },
    "Commercial": {
        "max_rolled_months": 9,
        "max_deferred_fix": 0.0125,
        "max_deferred_tracker": 0.02,
        "min_icr_fix": 1.50,
        "min_icr_trk": 1.60,
        "total_term": 10,
        "min_loan": 150000,
        "max_loan": 2000000,
        "standard_bbr": 0.04,
        "stress_bbr": 0.0425,
        "current_mvr": 0.0859,
        "term_months": _TERM_MONTHS,
    },
    "Semi-Commercial": {
        "max_rolled_months": 9,
        "max_deferred_fix": 0.0125,
        "max_deferred_tracker": 0.02,
        "min_icr_fix": 1.50,
        "min_icr_trk": 1.60,
        "total_term": 10,
        "min_loan": 150000,
        "max_loan": 2000000,
        "standard_bbr": 0.04,
        "stress_bbr": 0.0425,
        "current_mvr": 0.0859,
        "term_months": _TERM_MONTHS,
    },
}

# Percentages; the policy takes the minimum of every applicable cap.
MAX_LTV_RULES = {
    "default": {"Residential": 75, "Commercial": 70, "Semi-Commercial": 70},
    "retention": {
        "Residential": {"75": 75, "65": 65},
        "Commercial": {"75": 70, "65": 65},
        "Semi-Commercial": {"75": 70, "65": 65},
    },
    "flat_above_comm_overrides": {"Tier 2": 60, "Tier 3": 70},
}

# Rate tables: tier -> product -> fee column -> annual rate.  Tracker
# products carry ``is_margin`` and store the margin over base bank rate.
RATES_RESIDENTIAL = {
    "Tier 1": {
        "2yr Fix": {6: 0.0589, 4: 0.0639, 3: 0.0679, 2: 0.0719},
        "3yr Fix": {6: 0.0639, 4: 0.0679, 3: 0.0719, 2: 0.0749},
        "2yr Tracker": {6: 0.0159, 4: 0.0209, 3: 0.0249, 2: 0.0289, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {6: 0.0639, 4: 0.0679, 3: 0.0719, 2: 0.0749},
        "3yr Fix": {6: 0.0679, 4: 0.0719, 3: 0.0759, 2: 0.0789},
        "2yr Tracker": {6: 0.0209, 4: 0.0259, 3: 0.0299, 2: 0.0339, "is_margin": True},
    },
    "Tier 3": {
        "2yr Fix": {6: 0.0729, 4: 0.0779, 3: 0.0819, 2: 0.0849},
        "3yr Fix": {6: 0.0769, 4: 0.0809, 3: 0.0849, 2: 0.0879},
        "2yr Tracker": {6: 0.0239, 4: 0.0289, 3: 0.0329, 2: 0.0369, "is_margin": True},
    },
}

RATES_COMMERCIAL = {
    "Tier 1": {
        "2yr Fix": {6: 0.0629, 4: 0.0719, 2: 0.0829},
        "3yr Fix": {6: 0.0679, 4: 0.0749, 2: 0.0819},
        "2yr Tracker": {6: 0.0304, 4: 0.0404, 2: 0.0499, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {6: 0.0679, 4: 0.0769, 2: 0.0879},
        "3yr Fix": {6: 0.0729, 4: 0.0799, 2: 0.0869},
        "2yr Tracker": {6: 0.0334, 4: 0.0434, 2: 0.0529, "is_margin": True},
    },
}

RATES_SEMI_COMMERCIAL = {
    "Tier 1": {
        "2yr Fix": {6: 0.0619, 4: 0.0709, 2: 0.0819},
        "3yr Fix": {6: 0.0669, 4: 0.0739, 2: 0.0809},
        "2yr Tracker": {6: 0.0304, 4: 0.0404, 2: 0.0499, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {6: 0.0659, 4: 0.0749, 2: 0.0859},
        "3yr Fix": {6: 0.0709, 4: 0.0779, 2: 0.0849},
        "2yr Tracker": {6: 0.0334, 4: 0.0434, 2: 0.0529, "is_margin": True},
    },
}

RATES_CORE = {
    "Tier 1": {
        "2yr Fix": {6: 0.0529, 4: 0.0619, 3: 0.0679, 2: 0.0729},
        "3yr Fix": {6: 0.0579, 4: 0.0649, 3: 0.0686, 2: 0.0719},
        "2yr Tracker": {6: 0.0149, 4: 0.0249, 3: 0.0304, 2: 0.0354, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {6: 0.0589, 4: 0.0679, 3: 0.0739, 2: 0.0789},
        "3yr Fix": {6: 0.0639, 4: 0.0709, 3: 0.0746, 2: 0.0779},
        "2yr Tracker": {6: 0.0169, 4: 0.0269, 3: 0.0324, 2: 0.0374, "is_margin": True},
    },
}

# Commercial retention pricing matches the standard commercial sheets.
_RETENTION_COMMERCIAL = {
    "Tier 1": {
        "2yr Fix": {5.5: 0.0629, 3.5: 0.0719, 1.5: 0.0829},
        "3yr Fix": {5.5: 0.0679, 3.5: 0.0749, 1.5: 0.0819},
        "2yr Tracker": {5.5: 0.0304, 3.5: 0.0404, 1.5: 0.0499, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {5.5: 0.0679, 3.5: 0.0769, 1.5: 0.0879},
        "3yr Fix": {5.5: 0.0729, 3.5: 0.0799, 1.5: 0.0869},
        "2yr Tracker": {5.5: 0.0334, 3.5: 0.0434, 1.5: 0.0529, "is_margin": True},
    },
}

_RETENTION_SEMI_COMMERCIAL = {
    "Tier 1": {
        "2yr Fix": {5.5: 0.0619, 3.5: 0.0709, 1.5: 0.0819},
        "3yr Fix": {5.5: 0.0669, 3.5: 0.0739, 1.5: 0.0809},
        "2yr Tracker": {5.5: 0.0304, 3.5: 0.0404, 1.5: 0.0499, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {5.5: 0.0659, 3.5: 0.0749, 1.5: 0.0859},
        "3yr Fix": {5.5: 0.0709, 3.5: 0.0779, 1.5: 0.0849},
        "2yr Tracker": {5.5: 0.0334, 3.5: 0.0434, 1.5: 0.0529, "is_margin": True},
    },
}

RATES_RETENTION_65 = {
    "Residential": {
        "Tier 1": {
            "2yr Fix": {5.5: 0.0529, 3.5: 0.0559, 2.5: 0.0589, 1.5: 0.0619},
            "3yr Fix": {5.5: 0.0569, 3.5: 0.0599, 2.5: 0.0629, 1.5: 0.0659},
            "2yr Tracker": {5.5: 0.0119, 3.5: 0.0149, 2.5: 0.0179, 1.5: 0.0209, "is_margin": True},
        },
        "Tier 2": {
            "2yr Fix": {5.5: 0.0559, 3.5: 0.0589, 2.5: 0.0619, 1.5: 0.0649},
            "3yr Fix": {5.5: 0.0599, 3.5: 0.0629, 2.5: 0.0659, 1.5: 0.0689},
            "2yr Tracker": {5.5: 0.0149, 3.5: 0.0179, 2.5: 0.0209, 1.5: 0.0239, "is_margin": True},
        },
        "Tier 3": {
            "2yr Fix": {5.5: 0.0609, 3.5: 0.0639, 2.5: 0.0669, 1.5: 0.0699},
            "3yr Fix": {5.5: 0.0649, 3.5: 0.0679, 2.5: 0.0709, 1.5: 0.0739},
            "2yr Tracker": {5.5: 0.0189, 3.5: 0.0219, 2.5: 0.0249, 1.5: 0.0279, "is_margin": True},
        },
    },
    "Commercial": _RETENTION_COMMERCIAL,
    "Semi-Commercial": _RETENTION_SEMI_COMMERCIAL,
}

RATES_RETENTION_75 = {
    "Residential": {
        "Tier 1": {
            "2yr Fix": {5.5: 0.0539, 3.5: 0.0569, 2.5: 0.0599, 1.5: 0.0629},
            "3yr Fix": {5.5: 0.0579, 3.5: 0.0609, 2.5: 0.0639, 1.5: 0.0669},
            "2yr Tracker": {5.5: 0.0129, 3.5: 0.0159, 2.5: 0.0189, 1.5: 0.0219, "is_margin": True},
        },
        "Tier 2": {
            "2yr Fix": {5.5: 0.0569, 3.5: 0.0599, 2.5: 0.0629, 1.5: 0.0659},
            "3yr Fix": {5.5: 0.0609, 3.5: 0.0639, 2.5: 0.0669, 1.5: 0.0699},
            "2yr Tracker": {5.5: 0.0159, 3.5: 0.0189, 2.5: 0.0219, 1.5: 0.0249, "is_margin": True},
        },
        "Tier 3": {
            "2yr Fix": {5.5: 0.0619, 3.5: 0.0649, 2.5: 0.0679, 1.5: 0.0709},
            "3yr Fix": {5.5: 0.0659, 3.5: 0.0689, 2.5: 0.0719, 1.5: 0.0749},
            "2yr Tracker": {5.5: 0.0199, 3.5: 0.0229, 2.5: 0.0259, 1.5: 0.0289, "is_margin": True},
        },
    },
    "Commercial": _RETENTION_COMMERCIAL,
    "Semi-Commercial": _RETENTION_SEMI_COMMERCIAL,
}

_CORE_RETENTION = {
    "Tier 1": {
        "2yr Fix": {5.5: 0.0529, 3.5: 0.0619, 2.5: 0.0679, 1.5: 0.0729},
        "3yr Fix": {5.5: 0.0579, 3.5: 0.0649, 2.5: 0.0686, 1.5: 0.0719},
        "2yr Tracker": {5.5: 0.0149, 3.5: 0.0249, 2.5: 0.0304, 1.5: 0.0354, "is_margin": True},
    },
    "Tier 2": {
        "2yr Fix": {5.5: 0.0589, 3.5: 0.0679, 2.5: 0.0739, 1.5: 0.0789},
        "3yr Fix": {5.5: 0.0639, 3.5: 0.0709, 2.5: 0.0746, 1.5: 0.0779},
        "2yr Tracker": {5.5: 0.0169, 3.5: 0.0269, 2.5: 0.0324, 1.5: 0.0374, "is_margin": True},
    },
}

RATE_TABLES = {
    "standard": {
        "Residential": RATES_RESIDENTIAL,
        "Commercial": RATES_COMMERCIAL,
        "Semi-Commercial": RATES_SEMI_COMMERCIAL,
    },
    "retention": {"65": RATES_RETENTION_65, "75": RATES_RETENTION_75},
    "core": RATES_CORE,
    "core_retention": {"65": _CORE_RETENTION, "75": _CORE_RETENTION},
}
