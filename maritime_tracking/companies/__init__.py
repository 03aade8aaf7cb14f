"""
Companies module - tenant list derived from trackings, persisted companies
and the per-request company selection.
"""

from maritime_tracking.companies.extractor import (
    extract_companies,
    extract_company_names_loose,
    get_company_stats,
)
from maritime_tracking.companies.models import Company, CompanyOption
from maritime_tracking.companies.repository import CompanyRepository
from maritime_tracking.companies.session import CompanySession, effective_company

__all__ = [
    "Company",
    "CompanyOption",
    "CompanyRepository",
    "CompanySession",
    "effective_company",
    "extract_companies",
    "extract_company_names_loose",
    "get_company_stats",
]
