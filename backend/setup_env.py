"""
Setup script to create the backend .env file
"""
import os
import secrets

def create_env_file():
    """Create .env file from user input"""
    print("=" * 60)
    print("Quiz Kiosk Environment Setup")
    print("=" * 60)
    print()

    # Check if .env already exists
    if os.path.exists('.env'):
        response = input("⚠️  .env file already exists. Overwrite? (y/N): ")
        if response.lower() != 'y':
            print("❌ Cancelled. Keeping existing .env file.")
            return

    mongodb_url = input("MongoDB URL (default: mongodb://localhost:27017): ").strip() or "mongodb://localhost:27017"
    db_name = input("Database name (default: quiz_kiosk): ").strip() or "quiz_kiosk"
    port = input("Port (default: 3001): ").strip() or "3001"

    print()
    print("First administrator account:")
    admin_email = input("Admin email: ").strip()
    admin_password = input("Admin password: ").strip()

    if not admin_email or not admin_password:
        print("❌ Admin email and password cannot be empty!")
        return

    # Create .env content
    env_content = f"""# Server Configuration
PORT={port}

# MongoDB Configuration
MONGODB_URL={mongodb_url}
DATABASE_NAME={db_name}

# Admin authentication
JWT_SECRET={secrets.token_hex(32)}
JWT_ALGORITHM=HS256
JWT_EXPIRATION_HOURS=24
ADMIN_EMAIL={admin_email}
ADMIN_PASSWORD={admin_password}
"""

    # Write .env file
    try:
        with open('.env', 'w') as f:
            f.write(env_content)
        print()
        print("✅ .env file created successfully!")
        print()
        print("📝 Next steps:")
        print("   1. Run: python -m quiz_kiosk.database.seed (to create the admin and a sample quiz)")
        print("   2. Run: python -m quiz_kiosk.main (to start the server)")
        print()
    except OSError as e:
        print(f"❌ Error creating .env file: {e}")

if __name__ == "__main__":
    create_env_file()
