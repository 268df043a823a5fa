from app.spahtmx import create_app

app = create_app()
