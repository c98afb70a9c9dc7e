"""Payload stream health reporting for release-controller streams."""
