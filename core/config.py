import os
from dotenv import load_dotenv

load_dotenv()

MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "shopDB")

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
# hosted payment provider; its page sends the user back to FRONTEND_URL/verify
PAYMENT_API_URL = os.getenv("PAYMENT_API_URL", "https://api.example-pay.com/v1")
PAYMENT_API_KEY = os.getenv("PAYMENT_API_KEY", "")
CURRENCY = os.getenv("CURRENCY", "usd")
DELIVERY_FEE = float(os.getenv("DELIVERY_FEE", "10"))
