"""Stream readers and writers, and helpers for opening annotation files"""
