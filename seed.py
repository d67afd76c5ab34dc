from datetime import datetime, timedelta, timezone

from luma import create_app, get_store
from luma import firestore_dao as dao
from luma import snippets, units
from luma.firebase_init import get_auth
from luma.models import MODULE, SUBJECT, TOPIC, TRAINING, UNIT, UserSnapshot


def create_editor(email, display_name, password='password123'):
    """Create (or reuse) a Firebase account plus its profile document."""
    auth = get_auth()
    try:
        fb_user = auth.create_user(email=email, password=password, display_name=display_name)
    except auth.EmailAlreadyExistsError:
        fb_user = auth.get_user_by_email(email)
    uid = fb_user.uid
    dao.set_user(uid, {
        'email': email,
        'name': display_name,
        'role': 'editor',
        'created_at': datetime.now(timezone.utc),
    })
    return uid


def seed_database():
    app = create_app()
    with app.app_context():
        store = get_store()

        if app.config['REMOTE_ENABLED']:
            print("Creating editor account...")
            editor_id = create_editor('editor@example.com', 'Demo Editor')
        else:
            editor_id = 'demo-editor'
        editor = UserSnapshot(id=editor_id, name='Demo Editor', role='editor')

        print("Creating hierarchy...")
        subject = store.create(SUBJECT, {
            'title': 'Data Literacy',
            'description': 'Reading, cleaning and presenting data',
        })
        training = store.create(TRAINING, {'title': 'Spreadsheet Basics', 'subject_id': subject.id})
        module = store.create(MODULE, {'title': 'Working with Tables', 'training_id': training.id})
        topic = store.create(TOPIC, {
            'title': 'Sorting and Filtering',
            'training_module_id': module.id,
            'owner_id': editor_id,
        })

        print("Creating learning units...")
        now = datetime.now(timezone.utc)
        unit_rows = [
            ('Sort a column', 'Published', 'Select the column. Choose Sort. Check the result!'),
            ('Filter by value', 'Review', 'Open the filter menu. Pick the values to keep.'),
            ('Custom filters', 'Draft', 'Custom filters combine conditions. Use them sparingly?'),
            ('Filter pitfalls', 'Planning', ''),
        ]
        for title, state, text in unit_rows:
            unit = store.create(UNIT, {
                'title': title,
                'topic_id': topic.id,
                'editorial_state': state,
                'target_date': now + timedelta(days=14),
                'explanation': text,
            })
            if text:
                segments = snippets.process_text_to_snippets(store, unit.id, text)
                snippets.rate_snippet(store, unit.id, segments[0].id, editor_id, True)
            units.add_tag(store, unit.id, 'spreadsheets')
            units.add_learning_goal(store, unit.id, f'Can {title.lower()} without help')
            units.add_comment(store, unit.id, 'Needs a screenshot.', editor, context='explanation')

        print("\n" + "=" * 60)
        print(f"  Subject:  {subject.title} ({subject.id})")
        print(f"  Units:    {len(store.list_by_parent(UNIT, topic.id))}")
        if app.config['REMOTE_ENABLED']:
            print("  Editor:   editor@example.com / password123")
        print("=" * 60)
        print("Seed complete!")


if __name__ == '__main__':
    seed_database()
