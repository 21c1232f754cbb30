"""Property keys shared by the stored nodes."""

NAME = "Name"
ACTIVE = "Active"
REQUEST = "Request"
DESCRIPTION = "Description"
FULL_NAME = "FullName"
APPLICATION = "Application"
DATE = "Date"
LEVEL = "Level"
OBJECTS = "Objects"
