"""policy_dashboard package.

Contains modules for fetching pet-insurance policy records, normalizing the
nested pets field, and deriving the aggregates behind the sales dashboard
(monthly counts and premiums, city/species/plan distributions and KPIs).

Architecture:
- Supabase REST (or a local JSON export) -> validated `Policy` models
- Pets normalized once per policy into an explicit result value
- pandas groupbys build each dashboard aggregate independently
- Streamlit + Altair render the report
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
