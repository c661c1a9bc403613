"""
Central .env loader - data and results locations for the runner script.
"""
import os
from dotenv import find_dotenv, load_dotenv

# Load .env searching upward from the working directory
load_dotenv(find_dotenv(usecwd=True), interpolate=True)

DATA_PATH = os.getenv('METABOLITE_DATA_PATH', './data/human_cachexia.csv')
RESULTS_DIR = os.getenv('METABOLITE_RESULTS_DIR', './results')
