# create.py: create a user account from the command line
from getpass import getpass
from studydesk import create_app
from studydesk.errors import AppError
from studydesk.services.auth_service import register_user


def main():
    app = create_app()
    with app.app_context():
        username = input("Username: ").strip()
        name = input("Full name: ").strip()
        email = input("Email: ").strip().lower()
        phone = input("Phone (optional): ").strip()
        password = getpass("Password: ")

        try:
            user = register_user(username=username, name=name, email=email, password=password, phone=phone)
        except AppError as e:
            print(f"Could not create user: {e.message}")
            return
        print(f"User {user.username} created successfully.")

if __name__ == "__main__":
    main()
