import logging

import streamlit as st

from src.config import settings
from src.ui.layout import render_page


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    st.set_page_config(
        page_title="Mine-for-AI",
        layout="wide",
    )
    render_page()


if __name__ == "__main__":
    main()
