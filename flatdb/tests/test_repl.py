#!/usr/bin/env python3
"""
Tests for the command shell and the demo web application

Run: python -m pytest flatdb/tests/test_repl.py -v
"""

import io
import os
import sys
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

# Add parent directories to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from flatdb import REPL, Table
from flatdb.core.repl import main


class TestREPL(unittest.TestCase):
    """Test shell commands against a temporary table"""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.test_dir, 'shell.db')
        self.repl = REPL(self.path)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def run_line(self, line):
        out = io.StringIO()
        with redirect_stdout(out):
            ok = self.repl.execute(line)
        return ok, out.getvalue()

    def dot(self, command):
        out = io.StringIO()
        with redirect_stdout(out):
            self.repl._handle_command(command)
        return out.getvalue()

    def test_session(self):
        self.assertTrue(self.run_line('create id:int name:str joined:date')[0])
        self.assertTrue(self.run_line('index id')[0])

        ok, output = self.run_line('insert name=Alice joined=NOW()')
        self.assertTrue(ok)
        self.assertIn('Last id: 1', output)
        self.run_line('insert "name=Bob Builder"')

        ok, output = self.run_line('select name ali')
        self.assertIn('Alice', output)
        self.assertNotIn('Bob', output)
        self.assertIn('(1 row(s))', output)

        ok, output = self.run_line('update id =2 "name=Robert Builder"')
        self.assertIn('(1 row(s) affected)', output)
        self.assertEqual(Table(self.path).select('id', '=2')[0]['name'], 'Robert Builder')

        ok, output = self.run_line('delete name builder')
        self.assertIn('(1 row(s) affected)', output)
        self.assertEqual(self.dot('.count').strip(), '1 rows')
        self.assertEqual(self.dot('.lastid').strip(), '1')

    def test_select_sorted(self):
        self.run_line('create n:int')
        for value in (3, 1, 2):
            self.run_line(f'insert n={value}')
        ok, output = self.run_line('select * * n desc')
        lines = [line.strip() for line in output.splitlines()]
        self.assertEqual(lines[3:6], ['3', '2', '1'])

    def test_empty_result(self):
        self.run_line('create n:int')
        ok, output = self.run_line('select n =9')
        self.assertTrue(ok)
        self.assertIn('(0 rows)', output)

    def test_errors_are_reported(self):
        ok, output = self.run_line('create id:float')
        self.assertFalse(ok)
        self.assertIn('Error:', output)

        self.run_line('create id:int name:str')
        for line in ('insert name', 'index name', 'index', 'frobnicate', 'select name (',
                     'delete name', 'update id', 'create x:int', 'insert "name=unclosed'):
            ok, output = self.run_line(line)
            self.assertFalse(ok, line)
            self.assertIn('Error:', output, line)

    def test_schema_command(self):
        self.assertIn('not created', self.dot('.schema'))
        self.run_line('create id:int name:str')
        self.run_line('index id')
        output = self.dot('.schema')
        self.assertIn('INDEX KEY', output)
        self.assertIn('name', output)

    def test_quit(self):
        self.repl.running = True
        self.assertIn('Goodbye', self.dot('.quit'))
        self.assertFalse(self.repl.running)

    def test_main_execute(self):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            main(['-f', self.path, '-e', 'create id:int name:str'])
            main(['-f', self.path, '-i', 'id', '-e', 'insert name=Ann'])
            main(['-f', self.path, '-i', 'id', '-e', 'insert name=Ben'])
        self.assertEqual([row['id'] for row in Table(self.path).select()], ['1', '2'])

    def test_main_execute_failure(self):
        err = io.StringIO()
        with redirect_stdout(io.StringIO()), redirect_stderr(err):
            with self.assertRaises(SystemExit) as ctx:
                main(['-f', self.path, '-e', 'insert name=Ann'])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn('Error:', err.getvalue())


class TestDemoApp(unittest.TestCase):
    """Test the Flask demo through its test client"""

    def setUp(self):
        from demo_app.app import create_app

        self.test_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.test_dir, 'users.db')
        self.app = create_app(self.path)
        self.client = self.app.test_client()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_crud(self):
        resp = self.client.post('/api/users', json={'name': 'Ann', 'email': 'ann@example.com'})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json(), {'user_id': 1})

        user = self.client.get('/api/users/1').get_json()
        self.assertEqual(user['name'], 'Ann')
        self.assertRegex(user['date_created'], r'^\d{4}-\d{2}-\d{2} ')

        resp = self.client.put('/api/users/1', json={'email': 'new@example.com'})
        self.assertEqual(resp.get_json(), {'updated': 1})
        self.assertEqual(Table(self.path).select('user_id', '=1')[0]['email'], 'new@example.com')

        self.assertEqual(self.client.delete('/api/users/1').get_json(), {'deleted': 1})
        self.assertEqual(self.client.get('/api/users/1').status_code, 404)

    def test_search_and_seed(self):
        resp = self.client.post('/api/users/seed?count=3')
        self.assertEqual(resp.get_json(), {'inserted': 3, 'last_id': 3})
        self.client.post('/api/users', json={'name': 'Zed'})

        data = self.client.get('/api/users', query_string={'column': 'name', 'needle': '=zed'}).get_json()
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['users'][0]['user_id'], '4')

        stats = self.client.get('/api/stats').get_json()
        self.assertEqual(stats['count'], 4)
        self.assertEqual(stats['last_id'], 4)

        data = self.client.get('/api/users', query_string={'order_by': 'user_id', 'direction': 'desc'}).get_json()
        self.assertEqual([u['user_id'] for u in data['users']], ['4', '3', '2', '1'])

    def test_errors(self):
        self.assertEqual(self.client.post('/api/users', json=[1]).status_code, 400)
        self.assertEqual(self.client.post('/api/users', json={}).status_code, 400)
        self.assertEqual(self.client.put('/api/users/9', json={'name': 'x'}).status_code, 404)
        self.assertEqual(self.client.delete('/api/users/9').status_code, 404)
        resp = self.client.get('/api/users', query_string={'column': 'name', 'needle': '('})
        self.assertEqual(resp.status_code, 400)
        self.assertIn('error', resp.get_json())

    def test_duplicate_user_id(self):
        self.client.post('/api/users', json={'name': 'Ann'})
        self.client.post('/api/users', json={'name': 'Bo'})

        resp = self.client.post('/api/users', json={'user_id': 1, 'name': 'Impostor'})
        self.assertEqual(resp.status_code, 409)
        self.assertIn('error', resp.get_json())
        self.assertEqual(self.client.get('/api/users/1').get_json()['name'], 'Ann')
        self.assertEqual(self.client.get('/api/stats').get_json()['count'], 2)

        resp = self.client.post('/api/users', json={'user_id': 7, 'name': 'Cy'})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json(), {'user_id': 7})

    def test_reopen_existing_table(self):
        from demo_app.app import create_app

        self.client.post('/api/users', json={'name': 'Ann'})
        client = create_app(self.path).test_client()
        self.assertEqual(client.post('/api/users', json={'name': 'Bo'}).get_json(), {'user_id': 2})


if __name__ == '__main__':
    unittest.main()
