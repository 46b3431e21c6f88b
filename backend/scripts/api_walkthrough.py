"""
Example script showing how to interact with the Quiz Kiosk API
Walks through the kiosk flow: admin login, create a quiz, register,
take the quiz, then read and export the leaderboard.
"""

import json
import os

import requests

# Base URL - change if your server runs on a different port
BASE_URL = os.getenv("KIOSK_API_URL", "http://localhost:3001")


def print_response(title, response):
    """Helper function to print API responses"""
    print(f"\n{'='*60}")
    print(f"📌 {title}")
    print(f"{'='*60}")
    print(f"Status Code: {response.status_code}")
    try:
        data = response.json()
        print(f"Response:\n{json.dumps(data, indent=2)}")
    except ValueError:
        print(f"Response: {response.text}")


def main():
    print("\n🚀 Testing Quiz Kiosk API\n")

    # 1. Admin login
    print("\n1️⃣  Logging in as administrator...")
    login_data = {
        "email": os.getenv("ADMIN_EMAIL", "admin@example.com"),
        "password": os.getenv("ADMIN_PASSWORD", "password123"),
    }
    response = requests.post(f"{BASE_URL}/api/auth/login", json=login_data)
    print_response("Admin Login", response)
    if response.status_code != 200:
        print("\n❌ Failed to login. Did you run the seed script? Exiting...")
        return
    headers = {"Authorization": f"Bearer {response.json()['token']}"}

    # 2. Create a quiz with two questions
    print("\n\n2️⃣  Creating a quiz...")
    quiz_data = {
        "title": "Walkthrough Quiz",
        "description": "Created by the API walkthrough script",
        "duration": 1,
        "isActive": True,
        "customSuccessMessage": "Nice run!",
    }
    response = requests.post(f"{BASE_URL}/api/quizzes/", json=quiz_data, headers=headers)
    print_response("Create Quiz", response)
    if response.status_code != 201:
        print("\n❌ Failed to create quiz. Exiting...")
        return
    quiz_id = response.json()["id"]

    questions = [
        {
            "quizId": quiz_id,
            "text": "2 + 2 = ?",
            "options": [{"text": "4", "isCorrect": True}, {"text": "5"}],
        },
        {
            "quizId": quiz_id,
            "text": "Which one is a vowel?",
            "options": [{"text": "B"}, {"text": "E", "isCorrect": True}, {"text": "K"}],
        },
    ]
    for question in questions:
        response = requests.post(f"{BASE_URL}/api/questions/", json=question, headers=headers)
        print_response("Create Question", response)

    # 3. Register a participant
    print("\n\n3️⃣  Registering a participant...")
    response = requests.post(
        f"{BASE_URL}/api/participants/",
        json={"name": "Walkthrough Player", "email": "player@example.com"},
    )
    print_response("Register Participant", response)
    participant_id = response.json().get("id") if response.status_code == 201 else None

    # 4. Take the quiz
    print("\n\n4️⃣  Starting an attempt...")
    response = requests.post(
        f"{BASE_URL}/api/attempts/",
        json={"quizId": quiz_id, "participantId": participant_id},
    )
    print_response("Start Attempt", response)
    if response.status_code != 201:
        print("\n❌ Failed to start attempt. Exiting...")
        return
    attempt = response.json()
    attempt_id = attempt["id"]

    # Always pick the first option
    for question in attempt["questions"]:
        response = requests.post(
            f"{BASE_URL}/api/attempts/{attempt_id}/answers",
            json={"questionId": question["id"], "selectedOptionId": question["options"][0]["id"]},
        )
        print(f"   Answered {question['text']!r}: {response.status_code}")
        requests.post(f"{BASE_URL}/api/attempts/{attempt_id}/next")

    response = requests.post(f"{BASE_URL}/api/attempts/{attempt_id}/submit")
    print_response("Submit Attempt", response)

    # 5. Leaderboard
    print("\n\n5️⃣  Reading the leaderboard...")
    response = requests.get(
        f"{BASE_URL}/api/leaderboard",
        params={"quizId": quiz_id, "participantName": "Walkthrough Player"},
    )
    print_response("Leaderboard", response)

    response = requests.get(f"{BASE_URL}/api/leaderboard/export", params={"quizId": quiz_id})
    print(f"\n📄 Export status: {response.status_code}")
    if response.status_code == 200:
        print(response.text)

    response = requests.get(f"{BASE_URL}/api/stats", headers=headers)
    print_response("Dashboard Stats", response)

    print("\n\n✅ Walkthrough complete!")


if __name__ == "__main__":
    try:
        main()
    except requests.exceptions.ConnectionError:
        print("\n❌ Error: Could not connect to the server.")
        print(f"   Make sure the backend is running on {BASE_URL}")
