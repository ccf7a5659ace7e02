"""
smo_reporting.src - Real Estate Operations Reporting Dashboard

This package contains the layered codebase for the SMO reporting explorer.

Modules:
    - core: Exceptions, logging, settings and reporting definitions
    - domain: Pydantic data models and the aggregation pipeline
    - application: Reporting API client, operation catalogue and detail loading
    - services: Export and session persistence services
    - ui: Streamlit pages and UI components
"""

__version__ = "1.4.0"
