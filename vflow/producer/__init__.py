"""Producers that push encoded messages to a raw TCP or UDP socket."""