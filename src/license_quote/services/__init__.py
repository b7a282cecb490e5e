"""Services subpackage - presentation helpers."""
