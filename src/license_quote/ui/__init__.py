"""UI subpackage - Streamlit page (run as a script)."""
