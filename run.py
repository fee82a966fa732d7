import os

from redweb import create_app

# ================= APP =================
app = create_app(os.getenv("FLASK_ENV"))

# ================= PRODUCTION READY =================
# Gunicorn will serve this app in production:
#   gunicorn run:app --bind 0.0.0.0:8081
#
# For local development, use:
#   python run.py
#   OR: flask --app run run --port 8081

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8081"))
    print(f"🌐 API available at http://localhost:{port}/api")
    print(f"❤️  Health check: http://localhost:{port}/api/health")
    print(f"📝 Register new users at: http://localhost:{port}/api/auth/signup")
    print(f"🔐 Login at: http://localhost:{port}/api/auth/signin")
    app.run(host="0.0.0.0", port=port, debug=app.config.get("DEBUG", False))
