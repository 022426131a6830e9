"""
evstore CLI - inspect event fixtures through the in-memory storage engine

Commands:
- evstore events - Read one aggregate history
- evstore aggregates - List aggregate ids (paginated)
- evstore version - Show version information
"""

__version__ = "0.1.0"
