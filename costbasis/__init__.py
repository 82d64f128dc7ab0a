# coding: utf-8
from .config import CONFIG
