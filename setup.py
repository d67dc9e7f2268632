from setuptools import setup, find_packages

setup(
    name="scrim-scheduler",
    version="0.1",
    packages=find_packages(include=["scrim", "scrim.*"]),
    py_modules=["initialize_sheets"],
    install_requires=[
        "streamlit",
        "pandas",
        "google-api-python-client",
        "google-auth",
        "google-auth-httplib2",
        "extra_streamlit_components",
        "qrcode[pil]",
        "fastapi",
        "pydantic>=2",
        "httpx",
        "uvicorn",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
