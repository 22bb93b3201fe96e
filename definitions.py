import os

_PATH_PROJECT_ROOT = os.path.dirname(__file__)
PATH_RESOURCES = os.path.join(_PATH_PROJECT_ROOT, "resources")
PATH_RESULT_DOCUMENTS = os.path.join(PATH_RESOURCES, "results")
PATH_SCHEMA = os.path.join(_PATH_PROJECT_ROOT, "schema")

PATH_OUTPUT = os.path.join(_PATH_PROJECT_ROOT, "output")
