"""Shrine manifest types, classification, parsing, scanning, templates and validation."""