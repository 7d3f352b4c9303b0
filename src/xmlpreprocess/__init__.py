"""
XmlPreprocess - environment-driven XML preprocessing

Rewrites XML (or any text) files per deployment environment by resolving
property tokens, evaluating conditional comment blocks, splicing includes,
expanding foreach templates and applying XPath/Regex bindings.
"""

__version__ = "3.0.0"
__all__ = ["__version__"]
