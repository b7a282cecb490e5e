"""Data subpackage - catalog definitions and loader."""
