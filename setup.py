from setuptools import setup
import io


with io.open('README.md', encoding='utf-8') as f:
    long_description = f.read()


with io.open('requirements.txt', encoding='utf-8') as f:
    requirements = [r for r in f.read().split('\n') if len(r)]


setup(name='pyln-bolt11',
      version='0.1.0',
      description='Pure python decoder for Lightning Network BOLT11 payment requests',
      long_description=long_description,
      long_description_content_type='text/markdown',
      license='MIT',
      packages=['pyln.bolt11'],
      python_requires='>=3.8',
      zip_safe=True,
      install_requires=requirements,
      extras_require={
          'test': ['pytest'],
      })
