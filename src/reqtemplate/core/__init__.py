"""
Core of reqtemplate: the expression language, URIs and the template compiler.
"""
