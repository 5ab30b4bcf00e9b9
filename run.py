"""
Operations console entry point.

    python run.py                      start the development server
    python run.py --init-db            create any missing tables
    python run.py --summary 2026-03    print a month's accounts summary as JSON
"""
import json

from fieldops import create_app, db
from fieldops.accounts import compute_accounts_summary
from fieldops.store import RecordStore

app = create_app()

def init_db():
    with app.app_context():
        db.create_all()
        app.logger.info('Database initialized.')

def print_summary(month):
    with app.app_context():
        summary = compute_accounts_summary(RecordStore(), month)
        print(json.dumps(summary.model_dump(mode='json'), indent=2))

def main():
    import argparse
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('--init-db', action='store_true',
                        help='Create database tables and exit')
    parser.add_argument('--summary', metavar='YYYY-MM',
                        help='Print the accounts summary for a month and exit')
    args = parser.parse_args()

    if args.init_db:
        init_db()
    elif args.summary:
        print_summary(args.summary)
    else:
        app.run(debug=True)

if __name__ == '__main__':
    main()
