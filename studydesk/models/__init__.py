from .user import User, UserSession
from .task import Task
from .fileasset import FileAsset
from .resource import Resource
from .note import Note
from .topic import Topic
