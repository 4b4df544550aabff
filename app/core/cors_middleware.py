"""
Description:
Module for adding CORS middleware to FastAPI application.

Allowed origins come from the comma separated ``CORS_ORIGINS`` environment variable
and default to the local frontend.

Arguments:
- app: FastAPI application instance to which CORS middleware will be added.

Returns:
- None, but modifies the app to allow cross-origin requests from specified origins.

Dependencies:
- fastapi: For creating the FastAPI application and adding middleware.
- fastapi.middleware.cors: For CORS middleware functionality.
- loguru: For logging information about the middleware setup.

Author: @kcaparas1630
"""

import os
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

load_dotenv()

def parse_origins(value: str):
    return [origin.strip() for origin in value.split(",") if origin.strip()]

origins = parse_origins(os.getenv("CORS_ORIGINS", "http://localhost:3000"))

def add_cors_middleware(app: FastAPI):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(f"CORS middleware added for {len(origins)} origins")
