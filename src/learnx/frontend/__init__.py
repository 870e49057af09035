"""Page controllers and the Streamlit user interface."""
