from app.ideaboard import create_app

app = create_app()
