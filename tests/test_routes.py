"""HTTP-level tests for the JSON API."""

import io
import json
from unittest.mock import patch

from luma.errors import RemoteUnavailable


def body(response):
    return json.loads(response.data)


class TestAuth:
    def test_reads_are_public(self, client, tree):
        response = client.get('/api/subjects')
        assert response.status_code == 200
        assert {s['title'] for s in body(response)} == {'Data Literacy', 'Statistics'}

    def test_mutations_require_login(self, client):
        response = client.post('/api/subjects', json={'title': 'Biology'})
        assert response.status_code == 401
        assert body(response)['error'] == 'authentication required'


class TestHierarchyRoutes:
    def test_create_and_get(self, auth_client):
        response = auth_client.post('/api/subjects', json={'title': 'Biology', 'description': 'Life'})
        assert response.status_code == 201
        created = body(response)
        assert created['title'] == 'Biology'

        fetched = body(auth_client.get(f"/api/subjects/{created['id']}"))
        assert fetched['description'] == 'Life'

    def test_validation_error(self, auth_client):
        response = auth_client.post('/api/trainings', json={'title': 'Cells'})
        assert response.status_code == 400
        assert 'subject_id' in body(response)['errors']

    def test_topic_owner_defaults_to_caller(self, auth_client, tree):
        response = auth_client.post('/api/topics', json={
            'title': 'Filtering', 'trainingModuleId': tree['module'].id,
        })
        assert body(response)['ownerId'] == 'user-1'

    def test_list_by_parent(self, client, tree):
        response = client.get(f"/api/trainings?parent={tree['subject'].id}")
        assert [t['id'] for t in body(response)] == [tree['training'].id]

    def test_patch_without_title(self, auth_client, tree):
        response = auth_client.patch(f"/api/modules/{tree['module'].id}", json={'description': 'Rows'})
        assert response.status_code == 200
        assert body(response)['title'] == 'Tables'
        assert body(response)['description'] == 'Rows'

    def test_patch_blank_title_rejected(self, auth_client, tree):
        response = auth_client.patch(f"/api/modules/{tree['module'].id}", json={'title': '  '})
        assert response.status_code == 400

    def test_delete_cascades(self, auth_client, store, tree):
        response = auth_client.delete(f"/api/subjects/{tree['subject'].id}")
        assert response.status_code == 200
        deleted = body(response)['deleted']
        assert set(deleted['unit']) == {tree['unit_a'].id, tree['unit_b'].id}
        assert store.all('unit') == []

    def test_not_found(self, auth_client):
        assert auth_client.get('/api/topics/nope').status_code == 404
        assert auth_client.delete('/api/topics/nope').status_code == 404
        assert auth_client.patch('/api/topics/nope', json={'title': 'x'}).status_code == 404

    def test_stats_and_path(self, client, tree):
        stats = body(client.get(f"/api/topics/{tree['topic'].id}/stats"))
        assert stats['total'] == 2
        path = body(client.get(f"/api/topics/{tree['topic'].id}/path"))
        assert path['path'] == 'Data Literacy → Spreadsheets → Tables → Sorting'


class TestUnitRoutes:
    def test_create_unit(self, auth_client, tree):
        response = auth_client.post('/api/units', json={
            'title': 'Filter rows',
            'topicId': tree['topic'].id,
            'targetDate': '2024-06-01T00:00:00+00:00',
            'contentTypes': ['video'],
        })
        assert response.status_code == 201
        unit = body(response)
        assert unit['editorialState'] == 'Planning'
        assert unit['contentTypes'] == ['video']
        assert unit['targetDate'].startswith('2024-06-01')

    def test_rejects_unknown_state(self, auth_client, tree):
        response = auth_client.post(f"/api/units/{tree['unit_a'].id}/state", json={'state': 'Done'})
        assert response.status_code == 400

    def test_move_state(self, auth_client, tree):
        response = auth_client.post(f"/api/units/{tree['unit_a'].id}/state", json={'state': 'Review'})
        assert body(response)['editorialState'] == 'Review'

    def test_segment_and_vote(self, auth_client, store, tree):
        unit_id = tree['unit_a'].id
        segments = body(auth_client.post(f'/api/units/{unit_id}/snippets/segment',
                                         json={'text': 'A. B! C?  '}))
        assert [s['content'] for s in segments] == ['A', 'B', 'C']

        vote = body(auth_client.post(f"/api/units/{unit_id}/snippets/{segments[0]['id']}/vote",
                                     json={'isUpvote': True}))
        assert vote['rating'] == {'up': 1, 'down': 0, 'userVotes': {'user-1': True}}

    def test_vote_requires_direction(self, auth_client, tree):
        unit_id = tree['unit_a'].id
        segment = body(auth_client.post(f'/api/units/{unit_id}/snippets/segment',
                                        json={'text': 'Only sentence.'}))[0]
        url = f"/api/units/{unit_id}/snippets/{segment['id']}/vote"

        response = auth_client.post(url, json={})
        assert response.status_code == 400
        assert 'is_upvote' in body(response)['errors']

        down = body(auth_client.post(url, json={'isUpvote': False}))
        assert down['rating'] == {'up': 0, 'down': 1, 'userVotes': {'user-1': False}}

    def test_comment_flags(self, auth_client, tree):
        unit_id = tree['unit_a'].id
        comment = body(auth_client.post(f'/api/units/{unit_id}/comments',
                                        json={'content': 'Why?', 'context': 'explanation'}))
        assert comment['author']['name'] == 'Ada'

        response = auth_client.patch(f"/api/units/{unit_id}/comments/{comment['id']}",
                                     json={'isProcessed': True})
        updated = body(response)
        assert updated['isProcessed'] is True
        assert updated['isForDiscussion'] is True

    def test_blank_tag_rejected(self, auth_client, tree):
        response = auth_client.post(f"/api/units/{tree['unit_a'].id}/tags", json={'label': '   '})
        assert response.status_code == 400

    def test_tag_defaults(self, auth_client, tree):
        response = auth_client.post(f"/api/units/{tree['unit_a'].id}/tags", json={'label': 'basics'})
        assert body(response)['color'] == '#3B82F6'

    def test_image_upload(self, auth_client, tree):
        unit_id = tree['unit_a'].id
        with patch('luma.services.storage.upload_file', return_value='https://cdn/x.png'):
            response = auth_client.post(
                f'/api/units/{unit_id}/images',
                data={'file': (io.BytesIO(b'png'), 'x.png', 'image/png')},
                content_type='multipart/form-data',
            )
        assert response.status_code == 201
        assert body(response)['publicUrl'] == 'https://cdn/x.png'

    def test_upload_failure_is_bad_gateway(self, auth_client, tree):
        unit_id = tree['unit_a'].id
        with patch('luma.media._upload', side_effect=RemoteUnavailable('upload', 'videos', 'down')):
            response = auth_client.put(
                f'/api/units/{unit_id}/video',
                data={'file': (io.BytesIO(b'mp4'), 'v.mp4', 'video/mp4')},
                content_type='multipart/form-data',
            )
        assert response.status_code == 502

    def test_missing_file(self, auth_client, tree):
        response = auth_client.post(f"/api/units/{tree['unit_a'].id}/images", data={},
                                    content_type='multipart/form-data')
        assert response.status_code == 400


class TestIdeaRoutes:
    def test_lifecycle(self, auth_client):
        idea = body(auth_client.post('/api/ideas', json={'title': 'Glossary', 'tags': ['docs']}))
        assert idea['state'] == 'Idea'
        assert idea['author']['id'] == 'user-1'

        moved = body(auth_client.post(f"/api/ideas/{idea['id']}/state", json={'state': 'Exploration'}))
        assert moved['state'] == 'Exploration'

        board = body(auth_client.get('/api/ideas/board'))
        assert [i['id'] for i in board['Exploration']] == [idea['id']]

        assert auth_client.delete(f"/api/ideas/{idea['id']}").status_code == 200
        assert auth_client.get(f"/api/ideas/{idea['id']}").status_code == 404


class TestReviewRoutes:
    def test_comments_listing(self, auth_client, tree):
        unit_id = tree['unit_a'].id
        auth_client.post(f'/api/units/{unit_id}/comments', json={'content': 'general note'})
        auth_client.post(f'/api/units/{unit_id}/comments',
                         json={'content': 'explain more', 'context': 'explanation'})

        data = body(auth_client.get('/api/review/comments?context=explanation'))
        assert [c['content'] for c in data['comments']] == ['explain more']
        assert data['stats']['total'] == 2

    def test_kanban(self, client, tree):
        data = body(client.get(f"/api/review/kanban?subject={tree['subject'].id}"))
        assert set(data['columns']) == {'Planning', 'Draft', 'Review', 'Ready', 'Published'}
        assert len(data['columns']['Planning']) == 2
