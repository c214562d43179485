"""Pytest plugin and engine for YAML-based screenshot workflows.

The `pytest_scrn` package turns declarative YAML specifications of
visual regression screenshots into pytest test trees.

Key features:
- YAML-driven screenshot specifications collected as pytest test items;
- schema validation with precise error locations;
- tag, title and image filters, with language expansion of entries;
- an extensible action handler registry driving a Playwright browser.

Every screenshot entry runs in a fresh browser context, so a failing
entry never affects its siblings.
"""
