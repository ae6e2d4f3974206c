"""
Editorial workflow API URLs, mounted at /api/ in the main urls.py.
"""

from django.urls import path, include
from config.routers import SafeDefaultRouter
from .views import (
    ArticleViewSet,
    ChangeRecordViewSet,
    CommentViewSet,
    ReviewAssignmentViewSet,
    RevisionRequestViewSet,
)

app_name = 'articles'

router = SafeDefaultRouter()
router.register(r'articles', ArticleViewSet, basename='article')
router.register(r'changes', ChangeRecordViewSet, basename='change')
router.register(r'comments', CommentViewSet, basename='comment')
router.register(r'assignments', ReviewAssignmentViewSet, basename='assignment')
router.register(r'revision-requests', RevisionRequestViewSet, basename='revision-request')

urlpatterns = [
    path('', include(router.urls)),
]
