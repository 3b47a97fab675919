import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')

    # Public OSM reverse geocoder (no API key, mind the rate limits)
    REVERSE_GEOCODE_URL = os.environ.get('REVERSE_GEOCODE_URL') or 'https://nominatim.openstreetmap.org/reverse'

    # Where the location client posts its report
    BACKEND_URL = os.environ.get('BACKEND_URL') or 'http://localhost:5000'
    BACKEND_ENDPOINT = '/api/submit-location'

    # Nominatim rejects requests without an identifying User-Agent
    CLIENT_USER_AGENT = os.environ.get('CLIENT_USER_AGENT') or 'find-my-state/1.0'
    HTTP_TIMEOUT_SECONDS = float(os.environ.get('HTTP_TIMEOUT_SECONDS', 10))
