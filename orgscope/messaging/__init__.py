"""Module for messaging"""
from .base import MessageAdapter
