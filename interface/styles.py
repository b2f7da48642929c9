# interface/styles.py
"""Custom CSS for the Streamlit app."""


def get_custom_css() -> str:
    return """
    <style>
    .main-header {
        padding: 1.5rem 2rem;
        border-radius: 12px;
        background: linear-gradient(90deg, #1e3a8a 0%, #2563eb 100%);
        color: white;
        margin-bottom: 1.5rem;
    }
    .main-header h1 {
        margin: 0;
        font-size: 2rem;
    }
    .main-header p {
        margin: 0.25rem 0 0 0;
        opacity: 0.85;
    }
    div[data-testid="stMetricValue"] {
        font-size: 1.8rem;
    }
    </style>
    """
