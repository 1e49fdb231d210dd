from pathfinder import db
from pathfinder.models import GameSettings, Puzzle, User

DEMO_PUZZLES = [
    {
        'title': 'The Echoing Cave',
        'body': 'I have a voice but cannot speak. I have a bed but never sleep. What am I?',
        'hint': 'Think about a natural formation that carries sound.',
        'answer': 'A river',
    },
    {
        'title': "The Merchant's Dilemma",
        'body': ('A merchant can place 8 large boxes or 10 small boxes into a carton for shipping. '
                 'In one shipment, he sent a total of 96 boxes. If there are more large boxes than '
                 'small boxes, how many cartons did he ship?'),
        'hint': 'This is a system of equations problem.',
        'answer': '11 cartons: 7 of large boxes and 4 of small boxes.',
    },
    {
        'title': 'The Timeless Watch',
        'body': 'What has a face and two hands but no arms or legs?',
        'hint': 'It helps you know when to be somewhere.',
        'answer': 'A clock',
    },
    {
        'title': 'The Featherlight Burden',
        'body': 'What is so fragile that saying its name breaks it?',
        'hint': 'The absence of sound.',
        'answer': 'Silence',
    },
]


def seed_database(app):
    """Organizer account, settings row and the demo puzzles on every path.

    Each path walks the same puzzles starting from a different one.
    """
    admin = User(username=app.config.get('ADMIN_USERNAME', 'admin'))
    admin.set_password(app.config.get('ADMIN_PASSWORD', 'password'))
    db.session.add(admin)
    db.session.add(GameSettings(id=1, is_started=False, registration_open=True))

    for path_id in app.config.get('PATH_IDS') or [1]:
        shift = (path_id - 1) % len(DEMO_PUZZLES)
        rotated = DEMO_PUZZLES[shift:] + DEMO_PUZZLES[:shift]
        for order, data in enumerate(rotated):
            db.session.add(Puzzle(path_id=path_id, order=order, **data))

    db.session.commit()
