"""
Host core: configuration, dependency registries, error handling, i18n,
projects, themes and the application that composes them.
"""
