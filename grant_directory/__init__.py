"""
Grant Directory - browse federal, state, local and private funding.

Architecture:
- core/: Stable foundation (models, state table, jurisdiction classifier, slugs, search)
- storage: File-backed grant repository (JSON / JSONL exports)
- config/: YAML-driven site settings
- web/: aiohttp server, Jinja2 templates, canonical redirects
- sitemap: Sitemap generation from canonical paths
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
