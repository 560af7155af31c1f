"""Dashboard aggregation helpers.

Each module turns the normalized policy list into one dashboard dataset
(monthly counts, revenue, categorical distributions, KPIs). The aggregates
are independent of each other; `build_report` runs them all and packs the
results into a `DashboardReport`.
"""
