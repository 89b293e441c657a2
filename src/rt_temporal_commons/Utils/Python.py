"""
Reusable utility classes and functions for Python
"""

class Singleton(type):
	"""
	A metaclass which makes sure a class is only ever instantiated once per process.
	https://stackoverflow.com/a/6798042/750567
	"""
	_instances = {}
	def __call__(cls, *args, **kwargs):
		if cls not in cls._instances:
			cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
		return cls._instances[cls]
