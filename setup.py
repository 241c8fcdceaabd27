from setuptools import setup, find_packages

setup(
    name='segstitch',
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    python_requires='>=3.11',
    install_requires=[
        'colored==2.2.3',
        'halo==0.0.31',
        'numpy>=1.26.2',
        'python-dotenv>=1.0.0',
    ],
    extras_require={
        'test': ['pytest>=7.4'],
    },
    entry_points='''
        [console_scripts]
        segstitch=segstitch.__main__:main
    ''',
    license='MIT',
    keywords='media timeline playback timed events',
    description='Stitch media segments into one timeline with timed start/end events',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
