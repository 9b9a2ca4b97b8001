"""Test suite for Shape Detector."""
