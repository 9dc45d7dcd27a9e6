#!/usr/bin/env python3
"""
Demo Web Application - User Directory

A small JSON API that keeps its users in a FlatDB table file and
demonstrates the engine's insert, select, update and delete operations.

Features:
- Auto-incremented user IDs through the table's index key
- Substring and exact-match search with sorting
- Seeding the table with random users

Run:
    pip install flask
    python app.py

Then visit: http://localhost:5000/api/users
"""

import hashlib
import os
import random
import sys
import time

from flask import Flask, jsonify, request

# Add parent directory to path to import flatdb
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flatdb import Table
from flatdb.core.errors import FlatDBError
from flatdb.core.logging import setup_logging


USER_COLUMNS = {
    'user_id': 'int',
    'name': 'str',
    'email': 'str',
    'password': 'str',
    'date_created': 'date',
}

NAMES = [
    'brian', 'charles', 'christopher', 'daniel', 'david', 'donald', 'edward',
    'george', 'james', 'john', 'joseph', 'kenneth', 'mark', 'michael', 'paul',
    'richard', 'robert', 'ronald', 'steven', 'thomas',
]

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'users.db')


def open_users_table(path: str) -> Table:
    """Open the users table, creating it on first use."""
    table = Table(path)
    if not table.is_created():
        table.create(USER_COLUMNS)
    table.set_index_key('user_id')
    return table


def random_user() -> dict:
    """A random user in the shape the old sample driver produced."""
    name = random.choice(NAMES).title()
    return {
        'name': name,
        'email': f"{name.lower()}{random.randint(0, 999)}@example.com",
        'password': hashlib.sha1(str(time.time()).encode()).hexdigest()[:12],
        'date_created': 'NOW()',
    }


def create_app(db_path: str = DEFAULT_DB_PATH) -> Flask:
    """Build the demo app around the table stored at db_path."""
    app = Flask(__name__)
    app.config['USERS_TABLE'] = open_users_table(db_path)

    def users() -> Table:
        return app.config['USERS_TABLE']

    @app.errorhandler(FlatDBError)
    def handle_table_error(e):
        return jsonify({'error': str(e)}), 400

    @app.route('/api/users')
    def list_users():
        """Search users: ?column=name&needle=es&order_by=user_id&direction=desc"""
        rows = users().select(
            request.args.get('column', '*'),
            request.args.get('needle', '*'),
            request.args.get('order_by', ''),
            request.args.get('direction', 'asc'),
        )
        return jsonify({'count': users().affected_rows(), 'users': rows})

    @app.route('/api/users/<int:user_id>')
    def get_user(user_id):
        rows = users().select('user_id', f'={user_id}')
        if not rows:
            return jsonify({'error': 'User not found.'}), 404
        return jsonify(rows[0])

    @app.route('/api/users', methods=['POST'])
    def add_user():
        fields = request.get_json(silent=True)
        if not isinstance(fields, dict) or not fields:
            return jsonify({'error': 'Expected a non-empty JSON object.'}), 400

        fields.setdefault('date_created', 'NOW()')
        before = users().count()
        users().insert(fields)
        if users().count() == before:
            return jsonify({'error': f"User {fields['user_id']} already exists."}), 409
        return jsonify({'user_id': users().get_last_id()}), 201

    @app.route('/api/users/<int:user_id>', methods=['PUT'])
    def edit_user(user_id):
        fields = request.get_json(silent=True)
        if not isinstance(fields, dict):
            return jsonify({'error': 'Expected a JSON object.'}), 400

        users().update('user_id', f'={user_id}', fields)
        if users().affected_rows() == 0:
            return jsonify({'error': 'User not found.'}), 404
        return jsonify({'updated': users().affected_rows()})

    @app.route('/api/users/<int:user_id>', methods=['DELETE'])
    def delete_user(user_id):
        users().delete('user_id', f'={user_id}')
        if users().affected_rows() == 0:
            return jsonify({'error': 'User not found.'}), 404
        return jsonify({'deleted': users().affected_rows()})

    @app.route('/api/users/seed', methods=['POST'])
    def seed_users():
        """Insert ?count=N random users (default 10)."""
        count = request.args.get('count', 10, type=int)
        for _ in range(max(count, 0)):
            users().insert(random_user())
        return jsonify({'inserted': max(count, 0), 'last_id': users().get_last_id()}), 201

    @app.route('/api/stats')
    def api_stats():
        """Row count and the newest user ID."""
        return jsonify({
            'count': users().count(),
            'last_id': users().get_last_id(),
            'columns': users().columns(),
        })

    return app


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("FlatDB Demo - User Directory")
    print("=" * 60)
    print(f"\nDatabase file: {DEFAULT_DB_PATH}")
    print("Starting server at http://localhost:5000")
    print("\nPress Ctrl+C to stop the server.\n")

    setup_logging(level="INFO")
    create_app().run(debug=True, host='0.0.0.0', port=5000)
