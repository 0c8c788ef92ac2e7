"""Cross-package test suites for charon (per-package tests live beside the code)."""
